# pcb_quote/core/__init__.py

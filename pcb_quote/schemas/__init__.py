# pcb_quote/schemas/__init__.py

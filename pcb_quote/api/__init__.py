# pcb_quote/api/__init__.py

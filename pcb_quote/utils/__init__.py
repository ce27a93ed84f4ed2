# pcb_quote/utils/__init__.py

# pcb_quote/api/endpoints/__init__.py

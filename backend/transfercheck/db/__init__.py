# backend/transfercheck/db/__init__.py

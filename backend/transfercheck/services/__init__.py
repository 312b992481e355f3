# backend/transfercheck/services/__init__.py

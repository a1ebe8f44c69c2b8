# backend/wsgi.py
from kontainar import create_app

app = create_app()

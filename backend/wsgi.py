# backend/wsgi.py
from mealvilla import create_app

app = create_app()

import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///playcall.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Which rule splits a game's plays into drives for game-breaker gating:
    # possession, quarter or game
    DRIVE_BOUNDARY_RULE = os.environ.get('DRIVE_BOUNDARY_RULE', 'possession')
    # Comma separated front-end origins allowed by CORS and Socket.IO
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]

import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///playkers.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Invitations stay redeemable for this many days
    INVITATION_TTL_DAYS = int(os.environ.get('INVITATION_TTL_DAYS', '7'))
    # Base for shareable /accept-invite/<token> links
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', 'http://localhost:5000')
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', '')
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5000',
        ).split(',') if o.strip()
    ]

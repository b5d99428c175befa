import os


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('PRODUCTIVITY_DATABASE_URL', 'sqlite:///productivity.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('PRODUCTIVITY_LOG_LEVEL', 'INFO')

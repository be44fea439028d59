import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from the package directory or the backend directory
env_path = Path(__file__).parent / '.env'
if not env_path.exists():
    env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ACCESS_TOKEN_EXPIRES = False  # Identifier sign-in, sessions never expire

    MONGO_URI = os.getenv('MONGO_URI', 'mongodb://localhost:27017/smartsplit')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'smartsplit')

    # Gemini summaries are disabled when neither key is set
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY') or os.environ.get('GOOGLE_API_KEY')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.5-flash')

    CORS_ORIGINS = ["http://localhost:5173", "http://localhost:8080"]


class TestConfig(Config):
    TESTING = True
    MONGO_URI = 'mongodb://localhost:27017/smartsplit_test'
    MONGO_DB_NAME = 'smartsplit_test'
    GEMINI_API_KEY = None

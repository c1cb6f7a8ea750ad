#run it with uvicorn contact_relay.main:app --reload
from dotenv import load_dotenv
import logging

# Load environment variables from .env file
load_dotenv()

from contact_relay.core.config import get_settings
from contact_relay.app_factory import create_app

# Set up logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Fails fast on an unknown MAIL_PROVIDERS entry
app = create_app()

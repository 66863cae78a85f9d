"""Settings for judge"""
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Server settings
SERVER_HOST: str = os.getenv('SERVER_HOST', '127.0.0.1')
SERVER_PORT: int = int(os.getenv('SERVER_PORT', '5001'))

# Path settings
BASE_DIR = Path(__file__).resolve().parent

_upload_dir_in = os.getenv('UPLOAD_DIR')
if _upload_dir_in is not None:
    UPLOAD_DIR = Path(_upload_dir_in)
else:
    UPLOAD_DIR = BASE_DIR / 'uploads'

_problems_dir_in = os.getenv('PROBLEMS_DIR')
if _problems_dir_in is not None:
    PROBLEMS_DIR = Path(_problems_dir_in)
else:
    PROBLEMS_DIR = BASE_DIR / 'problems'

# Judge settings
# Interpreter used to run submitted programs (defaults to the one running the judge)
JUDGE_INTERPRETER: str = os.getenv('JUDGE_INTERPRETER', sys.executable)
JUDGE_TIMEOUT_MS: int = int(os.getenv('JUDGE_TIMEOUT_MS', '5000'))
# 1 means test cases of a submission are run strictly one after another
JUDGE_MAX_WORKERS: int = int(os.getenv('JUDGE_MAX_WORKERS', '1'))
MAX_PROGRAM_SIZE: int = int(os.getenv('MAX_PROGRAM_SIZE', str(64 * 1024)))

# Test case source settings
# 'yaml' reads PROBLEMS_DIR/<problem_id>.yaml, 'supabase' queries the platform database
TEST_CASE_SOURCE: str = os.getenv('TEST_CASE_SOURCE', 'yaml')
SUPABASE_URL = os.getenv('SUPABASE_URL')
SUPABASE_SERVICE_ROLE_KEY = os.getenv('SUPABASE_SERVICE_ROLE_KEY')

# Logging settings
_log_dir_in = os.getenv('LOG_DIR')
if _log_dir_in is not None:
    LOG_DIR = Path(_log_dir_in)
else:
    LOG_DIR = BASE_DIR / 'logs'
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / 'judge.log'
LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
LOG_TO_CONSOLE: bool = os.getenv('LOG_TO_CONSOLE') == 'true'
# log file rotation
LOG_MAX_BYTES: int = int(os.getenv('LOG_MAX_BYTES', '1000000'))
LOG_BACKUP_COUNT: int = int(os.getenv('LOG_BACKUP_COUNT', '5'))
LOGGER_PROMPT = '%(asctime)s %(name)s:%(filename)s:%(lineno)d: %(message)s'

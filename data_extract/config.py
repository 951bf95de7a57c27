import os
from dotenv import load_dotenv

# Load environment variables from a local .env file if present
load_dotenv()

LOG_LEVEL = os.getenv("DATA_EXTRACT_LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("DATA_EXTRACT_LOG_FILE")  # No file logging when unset

# Working directory for entries materialized out of archives
TEMP_DIR = os.getenv("DATA_EXTRACT_TEMP_DIR", os.path.join(os.getcwd(), "temp"))

DEFAULT_ENCODING = os.getenv("DATA_EXTRACT_ENCODING", "utf-8")

# Delimiter sniffing
SNIFF_SAMPLE_BYTES = int(os.getenv("DATA_EXTRACT_SNIFF_BYTES", "4096"))
CANDIDATE_DELIMITERS = os.getenv("DATA_EXTRACT_DELIMITERS", ",;\t|")

# Rows pulled from pandas per chunk when tokenizing delimited text
CSV_CHUNK_SIZE = int(os.getenv("DATA_EXTRACT_CSV_CHUNK_SIZE", "1000"))

# HTTP surface
UPLOAD_DIR = os.getenv("DATA_EXTRACT_UPLOAD_DIR", os.path.join("storage", "uploads"))
MAX_UPLOAD_MB = int(os.getenv("DATA_EXTRACT_MAX_UPLOAD_MB", "100"))

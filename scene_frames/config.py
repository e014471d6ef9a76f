from pathlib import Path
from dotenv import load_dotenv
import os

# Load environment variables from .env file
load_dotenv()

# Get the HOME and DATA paths from the .env file and convert to a Path object
HOME_DIR = Path(os.getenv("HOME_DIR", ".")).resolve()
DATA_DIR = Path(os.getenv("DATA_DIR", HOME_DIR / "data")).resolve()

for x in ["HOME_DIR", "DATA_DIR"]:
    path = locals()[x]
    if not path.exists():
        raise ValueError(f"{x} path '{path}' from .env does not exist.")

# Optional credentials profile and region forwarded to fsspec
STORAGE_PROFILE = os.getenv("STORAGE_PROFILE")
STORAGE_REGION = os.getenv("STORAGE_REGION")

import sys
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from gas_funder.cli import main

if __name__ == "__main__":
    sys.exit(main())

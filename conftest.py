import sys
from pathlib import Path

# Add the repository root to sys.path to allow importing probegen without installation
root_dir = Path(__file__).parent
sys.path.insert(0, str(root_dir))

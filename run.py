import sys
from pathlib import Path

# Add src to Python path so imports work without installing
sys.path.insert(0, str(Path(__file__).parent / "src"))

from surf_backend.app.main import main

if __name__ == "__main__":
    sys.exit(main())

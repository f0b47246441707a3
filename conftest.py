"""
Pytest configuration for Token Auth Service tests.
Sets up the Python path for all tests.
"""

import sys
from pathlib import Path

# Add the project root to Python path for all tests
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

"""
Test configuration for Once evaluator tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from environment import EMPTY_ENV


@pytest.fixture
def empty_env():
  return EMPTY_ENV

# run_tests.py

import unittest
import sys
import os

# Add the project root to the Python path
# This allows the test runner to find the 'app' module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__))))

if __name__ == '__main__':
    # Optional filter, e.g. `python run_tests.py scheduler` runs tests/test_scheduler*.py
    pattern = f"test_{sys.argv[1]}*.py" if len(sys.argv) > 1 else "test*.py"

    loader = unittest.TestLoader()
    suite = loader.discover('tests', pattern=pattern)

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    # Exit with a non-zero status code if any tests failed
    if not result.wasSuccessful():
        sys.exit(1)

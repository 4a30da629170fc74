#!/usr/bin/env python3
"""
cucumber-runner - main entry point
Discovers Cucumber scenarios and runs each one through cucumber-js
"""

from cucumber_runner.cli import main

if __name__ == '__main__':
    main()

#!/usr/bin/env python3
from jsonsite.cli import main

if __name__ == "__main__":
    main()

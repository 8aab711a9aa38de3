#!/usr/bin/env python3
from imgur_components.cli import main


if __name__ == "__main__":
    raise SystemExit(main())

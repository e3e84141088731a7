# SPDX-License-Identifier: CC-BY-NC-SA-4.0
# Copyright (c) 2025-2026 fumi-engineer

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())

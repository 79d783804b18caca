# SPDX-License-Identifier: LGPL-3.0-or-later
from .cli.main import run

if __name__ == "__main__":
    run()

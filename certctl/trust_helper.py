#!/usr/bin/env python3
"""Trust store refresh helper copied to remote hosts.

Deploy CA copies this file to the remote host and Install CA runs it there
as ``python3 <script_dest> 4``. It uses the standard library only so it runs
where certctl itself is not installed.
"""

import subprocess
import sys

UPDATE_CHOICE = "4"
UPDATE_COMMAND = ["update-ca-trust"]


def main(argv=None) -> int:
    """Run the trust refresh for choice 4, exit 1 for anything else."""
    args = sys.argv[1:] if argv is None else argv
    if args != [UPDATE_CHOICE]:
        print("Invalid choice. Exiting.")
        return 1

    try:
        result = subprocess.run(UPDATE_COMMAND)
    except FileNotFoundError:
        print(f"Error occurred in Install CA locally/Update CA Trust: {UPDATE_COMMAND[0]} not found", file=sys.stderr)
        return 127

    if result.returncode != 0:
        print(f"Error occurred in Install CA locally/Update CA Trust: {' '.join(UPDATE_COMMAND)}", file=sys.stderr)
    return result.returncode


if __name__ == "__main__":
    sys.exit(main())

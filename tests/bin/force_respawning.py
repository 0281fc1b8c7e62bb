import sys

import flagged_respawn


def report(ready, child, args):
    print("Running!" if ready else "Respawning!")


flagged_respawn.flagged_respawn(["-B"], sys.orig_argv, ["-u"], execute=report)

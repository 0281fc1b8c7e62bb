import sys

import flagged_respawn


def report(ready, child, args):
    print("Running!" if ready else "Respawning!")


argv = [*sys.orig_argv, "--no-respawning"]
flagged_respawn.flagged_respawn(["-B"], argv, ["-u"], True, execute=report)

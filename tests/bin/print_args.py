import sys

import flagged_respawn


def report(ready, child, args):
    if ready:
        print("cli args passed to app:", " ".join(args))
    else:
        print("Respawning!")


flagged_respawn.flagged_respawn(["-B"], sys.orig_argv, ["-u"], execute=report)

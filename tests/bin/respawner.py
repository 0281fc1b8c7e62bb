import flagged_respawn

FLAGS = ["-B"]

if not flagged_respawn.needed(FLAGS):
    print("running.")
else:
    print("respawning.")
    flagged_respawn.execute(FLAGS).finish()

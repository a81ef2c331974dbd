"""Navigation — guard outcomes, guard extraction, and lazy components.

Everything the transition controller queues during a navigation is
assembled here; the controller itself lives in ``waypoint.history``.
"""

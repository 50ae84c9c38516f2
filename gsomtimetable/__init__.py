"""
GSOM timetable core: slug routing and recurring schedule events.
"""

"""
Venue Compliance Engine.

Recurring compliance checklists for hospitality venues: which tasks are due
on a day, who completed them, which were satisfied by unrelated activity
logs, and which completions a manager has signed off.
"""

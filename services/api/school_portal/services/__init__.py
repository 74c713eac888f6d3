"""Business logic services.

Services contain the school workflows (admissions, grading, ranking,
documents) and are called by routes and scripts. They take the TableAccessor
and Settings explicitly and never touch HTTP request objects.
"""

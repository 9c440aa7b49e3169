"""
Availability-matching and recommendation engine for the activity marketplace.

Pure functions over in-memory data: the evaluator and conflict detector decide
when an activity can happen, the scorers and rankers decide what to suggest.
"""

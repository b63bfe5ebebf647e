"""opendj - a single-stream chat DJ.

Requesters submit songs through chat; the engine queues them fairly, streams
exactly one at a time through an external renderer and answers queue queries.
"""

__version__ = "0.1.0"

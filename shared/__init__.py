"""
Shared Kernel

Building blocks reused by every bounded context: entity and event base
classes, the common value objects, the error hierarchy, the message bus
and the unit of work.
"""

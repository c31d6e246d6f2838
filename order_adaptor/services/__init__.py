"""
Services package for the Order Adaptor Service.

Services orchestrate order workflows against the commerce API client and
convert upstream failures into domain errors.
"""

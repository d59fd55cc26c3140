r"""Building blocks of the request cycle.

This package provides path templating and composition, request body
serialization, header assembly, the deferred/callback bridge, timeout
enforcement, response decoding, transport error handling and structured
logging. Import the functions from their modules, e.g.
``aresource.utils.paths``.
"""

"""SSL certificate handling utilities.

Firebase endpoints are reached over HTTPS with ``requests``. Behind corporate
proxies the bundled certifi store lacks the proxy's CA, so the OS trust store is
injected into Python's SSL context with the truststore package when available.
"""

import logging

logger = logging.getLogger(__name__)

_ssl_initialized = False


def init_ssl() -> bool:
    """
    Inject the OS native certificate store into Python's SSL context.

    Safe to call more than once.

    Returns:
        True if truststore was injected, False if the bundled certificates are used.
    """
    global _ssl_initialized

    if _ssl_initialized:
        return True

    try:
        import truststore
        truststore.inject_into_ssl()
        _ssl_initialized = True
        logger.debug("SSL: using OS native certificate store via truststore")
        return True
    except ImportError:
        logger.warning("SSL: truststore not installed, using bundled certificates")
    except Exception as e:
        logger.warning(f"SSL: failed to inject truststore ({e}), using bundled certificates")
    return False

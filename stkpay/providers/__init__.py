from stkpay.providers.mpesa_provider import DarajaClient


def build_daraja_client(app_config) -> DarajaClient:
    """
    Build the Daraja client from Flask app configuration.

    Args:
        app_config: ``app.config`` (any mapping with the MPESA_* keys)
    """
    return DarajaClient(_get_provider_config(app_config))


def _get_provider_config(app_config) -> dict:
    return {
        'consumer_key':    app_config.get('MPESA_CONSUMER_KEY'),
        'consumer_secret': app_config.get('MPESA_CONSUMER_SECRET'),
        'shortcode':       app_config.get('MPESA_SHORTCODE'),
        'passkey':         app_config.get('MPESA_PASSKEY'),
        'environment':     app_config.get('MPESA_ENV', 'sandbox'),
        'timeout':         app_config.get('MPESA_HTTP_TIMEOUT', 30),
    }


__all__ = ['DarajaClient', 'build_daraja_client']

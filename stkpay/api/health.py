"""
Health Check and System Monitoring Endpoints
"""

from flask import Blueprint, jsonify
from datetime import datetime, timezone
import os
import psutil
from redis.exceptions import RedisError

from stkpay.extensions import get_services

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Liveness check

    Returns:
        200 with process uptime in seconds
    """
    services = get_services()
    return jsonify({
        'status': 'ok',
        'uptime': round(services.clock() - services.started_at, 3),
        'timestamp': datetime.now(timezone.utc).isoformat()
    }), 200


@health_bp.route('/metrics', methods=['GET'])
def metrics():
    """
    Basic process and application metrics

    Returns:
        System and application metrics
    """
    services = get_services()
    process = psutil.Process()
    memory = process.memory_info()

    redis_status = None
    if services.redis is not None:
        try:
            redis_status = 'ok' if services.redis.ping() else 'unreachable'
        except RedisError as e:
            redis_status = f'error: {str(e)}'

    return jsonify({
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'system': {
            'process': {
                'pid': os.getpid(),
                'threads': process.num_threads(),
                'rss': memory.rss,
                'vms': memory.vms
            }
        },
        'application': {
            'backend': services.backend,
            'redis': redis_status,
            'transactions': {
                'stored': services.store.size()
            },
            'webhooks': services.webhooks.statistics(),
            'token': {
                'refreshes': services.token_cache.refresh_count
            },
            'reaper': {
                'running': services.reaper.is_running
            }
        }
    }), 200

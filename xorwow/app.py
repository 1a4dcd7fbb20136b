# xorwow/app.py
# Flask service exposing one XORWOW stream: /next, /skip, /skip_subsequence,
# /state, /validate and /reset.

import logging
import threading

from flask import Flask, jsonify, request

from . import config
from .engine import XorwowEngine

logger = logging.getLogger('xorwow.service')


def _bad_request(reason):
    return jsonify({'ok': False, 'reason': reason}), 400


def _int_field(data, name, default=None):
    # JSON ints, or hex/decimal strings for values past 2**53
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    if name not in data:
        if default is None:
            raise ValueError(f"need {name}")
        return default
    value = data[name]
    if isinstance(value, bool):
        raise ValueError(f"bad {name}")
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            raise ValueError(f"bad {name}") from None
    if not isinstance(value, int):
        raise ValueError(f"bad {name}")
    return value


def create_app(seed=None, subsequence=None, offset=None):
    if seed is None:
        seed = config.DEFAULT_SEED
    if subsequence is None:
        subsequence = config.SUBSEQUENCE
    if offset is None:
        offset = config.OFFSET

    app = Flask(__name__)
    stream = {'engine': XorwowEngine(seed, subsequence, offset), 'seed': seed}
    # the dev server is threaded; next() and discard() must not interleave
    lock = threading.Lock()
    logger.info(f"Stream ready: seed={seed:#x} subsequence={subsequence} offset={offset}")

    @app.route('/next', methods=['GET'])
    def next_outputs():
        try:
            count = int(request.args.get('count', 1))
        except ValueError:
            return _bad_request('bad count')
        if count < 1 or count > config.MAX_BATCH:
            return _bad_request(f"count must be in [1, {config.MAX_BATCH}]")
        with lock:
            outputs = [format(stream['engine'].next(), '08x') for _ in range(count)]
        return jsonify({'outputs': outputs})

    @app.route('/skip', methods=['POST'])
    def skip():
        try:
            offset = _int_field(request.get_json(silent=True), 'offset')
            with lock:
                stream['engine'].discard(offset)
        except ValueError as e:
            return _bad_request(str(e))
        return jsonify({'ok': True})

    @app.route('/skip_subsequence', methods=['POST'])
    def skip_subsequence():
        try:
            subsequence = _int_field(request.get_json(silent=True), 'subsequence')
            with lock:
                stream['engine'].discard_subsequence(subsequence)
        except ValueError as e:
            return _bad_request(str(e))
        return jsonify({'ok': True})

    @app.route('/state', methods=['GET'])
    def state():
        with lock:
            engine = stream['engine']
            body = {'x': list(engine.x), 'd': engine.d, 'state': engine.to_bytes().hex()}
        return jsonify(body)

    @app.route('/validate', methods=['POST'])
    def validate():
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or 'candidate' not in data:
            return _bad_request('need candidate')
        try:
            candidate = int(data['candidate'], 16)
        except (TypeError, ValueError):
            return _bad_request('bad hex')
        with lock:
            expected = stream['engine'].next()
        return jsonify({'ok': candidate == expected, 'expected': format(expected, '08x')})

    @app.route('/reset', methods=['POST'])
    def reset():
        data = request.get_json(silent=True)
        try:
            with lock:
                new_seed = _int_field(data, 'seed', stream['seed'])
                sub = _int_field(data, 'subsequence', 0)
                off = _int_field(data, 'offset', 0)
                stream['engine'] = XorwowEngine(new_seed, sub, off)
                stream['seed'] = new_seed
        except ValueError as e:
            return _bad_request(str(e))
        logger.info(f"Stream reset: seed={new_seed:#x} subsequence={sub} offset={off}")
        return jsonify({'ok': True})

    return app


def main():
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
    app = create_app()
    logger.info(f"Starting service at http://{config.HOST}:{config.PORT} with seed={config.DEFAULT_SEED:#x}")
    app.run(host=config.HOST, port=config.PORT, debug=False)


if __name__ == '__main__':
    main()

# xorwow/client.py
# Checks a running stream service against a local engine: reset the remote
# stream, pull outputs, skip both sides ahead and compare again.

import argparse
import logging
import time

import requests

from . import config
from .engine import XorwowEngine

logger = logging.getLogger('xorwow.client')


class StreamClient:
    def __init__(self, base_url=None, timeout=5):
        if base_url is None:
            base_url = f"http://{config.HOST}:{config.PORT}"
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _get(self, path, **params):
        r = requests.get(self.base_url + path, params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _post(self, path, payload):
        r = requests.post(self.base_url + path, json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def next(self, count=1):
        return [int(o, 16) for o in self._get('/next', count=count)['outputs']]

    def skip(self, offset):
        return self._post('/skip', {'offset': str(offset)})

    def skip_subsequence(self, subsequence):
        return self._post('/skip_subsequence', {'subsequence': str(subsequence)})

    def state(self):
        return self._get('/state')

    def reset(self, seed, subsequence=0, offset=0):
        return self._post('/reset', {'seed': str(seed), 'subsequence': str(subsequence),
                                     'offset': str(offset)})

    def validate(self, candidate):
        return self._post('/validate', {'candidate': format(candidate, '08x')})


def _compare(remote, local, checked):
    for i, (r, l) in enumerate(zip(remote, local)):
        if r != l:
            return {'ok': False, 'checked': checked + i,
                    'mismatch': {'index': checked + i, 'remote': r, 'local': l}}
    return None


def verify_stream(client, seed, subsequence=0, offset=0, samples=16, skip=1 << 40):
    client.reset(seed, subsequence, offset)
    local = XorwowEngine(seed, subsequence, offset)

    remote = client.next(samples)
    bad = _compare(remote, [local.next() for _ in range(samples)], 0)
    if bad:
        return bad

    client.skip(skip)
    local.discard(skip)
    remote = client.next(samples)
    bad = _compare(remote, [local.next() for _ in range(samples)], samples)
    if bad:
        return bad

    # the stream must still be in step for /validate
    ok = client.validate(local.next())['ok']
    if not ok:
        return {'ok': False, 'checked': 2 * samples, 'mismatch': {'index': 2 * samples}}
    return {'ok': True, 'checked': 2 * samples + 1, 'mismatch': None}


def main(argv=None):
    parser = argparse.ArgumentParser(description='Verify a XORWOW stream service')
    parser.add_argument('--url', default=None, help='service base url')
    parser.add_argument('--seed', type=lambda s: int(s, 0), default=config.DEFAULT_SEED)
    parser.add_argument('--subsequence', type=lambda s: int(s, 0), default=0)
    parser.add_argument('--offset', type=lambda s: int(s, 0), default=0)
    parser.add_argument('--samples', type=int, default=16, help='outputs compared per round')
    parser.add_argument('--skip', type=lambda s: int(s, 0), default=1 << 40, help='distance skipped between rounds')
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
    client = StreamClient(args.url)
    t0 = time.time()
    logger.info(f"Verifying {client.base_url} seed={args.seed:#x} subsequence={args.subsequence} offset={args.offset}")
    result = verify_stream(client, args.seed, args.subsequence, args.offset, args.samples, args.skip)
    if result['ok']:
        logger.info(f"Stream matches local engine ({result['checked']} outputs)")
    else:
        logger.error(f"Stream diverged: {result['mismatch']}")
    logger.info(f"Done in {time.time() - t0:.2f}s")
    return 0 if result['ok'] else 1


if __name__ == '__main__':
    raise SystemExit(main())

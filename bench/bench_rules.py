import argparse
import statistics
import time

from routeguard import AuthorizationMiddleware, grant, revoke, where


def gen_rules(n: int) -> list:
    rules = []
    for i in range(n - 1):
        rules.append(grant(where(lambda k, i=i: k == i, "k")))
    rules.append(revoke(where(lambda banned: banned is True, "banned")))
    return rules


def run(size: int, iters: int):
    mw = AuthorizationMiddleware(gen_rules(size))
    ctx = {"k": size // 2, "banned": False}
    lat = []
    for _ in range(iters):
        t0 = time.perf_counter()
        allowed = mw.authorize_sync(ctx)
        lat.append((time.perf_counter() - t0) * 1000.0)
    return {
        "p50": statistics.median(lat),
        "avg": sum(lat) / len(lat),
        "p90": percentile(lat, 90),
        "allowed": allowed,
    }


def percentile(arr, p):
    arr2 = sorted(arr)
    k = int(round((p / 100.0) * (len(arr2) - 1)))
    return arr2[k]


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--sizes", type=int, nargs="+", default=[10, 50, 100, 500])
    ap.add_argument("--iters", type=int, default=200)
    args = ap.parse_args()
    print("size,avg_ms,p50_ms,p90_ms,allowed")
    for s in args.sizes:
        r = run(s, args.iters)
        print(f"{s},{r['avg']:.3f},{r['p50']:.3f},{r['p90']:.3f},{r['allowed']}")


if __name__ == "__main__":
    main()

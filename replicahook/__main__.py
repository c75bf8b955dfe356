import argparse
import logging
import os
import sys

from replicahook.errors import ConfigurationError
from replicahook.manager import DEFAULT_PORT, DEFAULT_TLS_CERT, DEFAULT_TLS_KEY, Manager, TLSConfig


COMMANDS = ("serve", "manifest")
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


def parse_args(argv=None) -> argparse.Namespace:
    argv = sys.argv[1:] if argv is None else list(argv)
    # serve is the default command
    if not argv or argv[0] not in COMMANDS + ("-h", "--help"):
        argv = ["serve", *argv]

    parser = argparse.ArgumentParser(prog="replicahook")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="serve the mutating webhook over HTTPS")
    manifest = sub.add_parser("manifest", help="print the MutatingWebhookConfiguration")

    serve.add_argument("--port", type=int, default=int(os.getenv("REPLICAHOOK_PORT", DEFAULT_PORT)),
                       help="admission controller port")
    serve.add_argument("--tls-key", default=os.getenv("REPLICAHOOK_TLS_KEY", DEFAULT_TLS_KEY),
                       help="private key for TLS")
    serve.add_argument("--tls-crt", default=os.getenv("REPLICAHOOK_TLS_CRT", DEFAULT_TLS_CERT),
                       help="TLS certificate")
    serve.add_argument("--log-level", type=str.lower, default=os.getenv("REPLICAHOOK_LOG_LEVEL", "info"),
                       choices=LOG_LEVELS)

    manifest.add_argument("--service", default="replicahook")
    manifest.add_argument("--namespace", default="default")
    manifest.add_argument("--ca-bundle-file", default=None,
                          help="PEM file with the CA that signed the serving certificate")
    manifest.add_argument("--failure-policy", default="Fail", choices=["Fail", "Ignore"])

    args = parser.parse_args(argv)
    # defaults from the environment skip the choices check
    if args.command == "serve" and args.log_level not in LOG_LEVELS:
        parser.error(f"invalid log level: {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.command == "manifest":
        ca_bundle = None
        if args.ca_bundle_file:
            with open(args.ca_bundle_file, "rb") as f:
                ca_bundle = f.read()
        manager = Manager(TLSConfig())
        sys.stdout.write(manager.manifest(
            args.service, args.namespace, ca_bundle=ca_bundle, failure_policy=args.failure_policy,
        ))
        return 0

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    manager = Manager(TLSConfig(certfile=args.tls_crt, keyfile=args.tls_key), port=args.port)
    try:
        manager.start(log_level=args.log_level)
    except ConfigurationError as err:
        logging.getLogger("fastapi").error("%s", err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Command-line interface for swinelink.

Thin front end over PorkbunClient: each subcommand maps to one client
operation and prints the response body as JSON. Errors are printed as JSON on
stderr and give exit code 1.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Optional, Union

from . import __version__
from .client import PorkbunClient
from .config import SystemConfig, create_default_user_config, get_user_config_path, load_config
from .domain_validator import normalize_to_canonical
from .exceptions import ConfigurationError, DomainValidationError, RequestError
from .tld_registry import filter_pricing


def _print_json(data: Any, stream=None) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False), file=stream or sys.stdout)


def _domain(value: str) -> str:
    """argparse type: accept Unicode domains by converting them to punycode."""
    try:
        return normalize_to_canonical(value)
    except DomainValidationError as e:
        raise argparse.ArgumentTypeError(e.message)


def _record(args: argparse.Namespace, *fields: str) -> dict:
    """Collect the non-empty record fields given on the command line."""
    record = {}
    for name in fields:
        value = getattr(args, name, None)
        if value is not None:
            record[name] = value
    return record


def _glue_ip(addresses: list[str]) -> Union[str, list[str]]:
    """A single glue address is sent as a plain string, several as a list."""
    return addresses[0] if len(addresses) == 1 else addresses


async def run_operation(client: PorkbunClient, args: argparse.Namespace) -> Any:
    """Dispatch parsed arguments to the matching client operation; return response data."""
    command = args.command
    action = getattr(args, "action", None)

    if command == "ping":
        return (await client.ping()).data
    if command == "check":
        return (await client.check_availability(args.domain)).data
    if command == "list":
        return (await client.list_domains()).data
    if command == "pricing":
        data = (await client.get_pricing()).data
        if not args.tlds:
            return data
        filtered, missing = filter_pricing(data, args.tlds)
        result = {**data, "pricing": filtered}
        if missing:
            result["notFound"] = missing
        return result

    if command == "dns":
        if action == "create":
            record = _record(args, "type", "content", "name", "ttl", "prio")
            return (await client.dns_create_record(args.domain, record)).data
        if action == "list":
            return (await client.dns_list_records(args.domain)).data
        if action == "get":
            return (await client.dns_retrieve_record(args.domain, args.id)).data
        if action == "get-by-type":
            return (await client.dns_retrieve_record_by_name_type(args.domain, args.type, args.subdomain)).data
        if action == "edit":
            record = _record(args, "type", "content", "name", "ttl", "prio")
            return (await client.dns_update_record(args.domain, args.id, record)).data
        if action == "edit-by-type":
            record = _record(args, "content", "ttl", "prio")
            return (await client.dns_update_record_by_name_type(
                args.domain, args.type, record, args.subdomain,
            )).data
        if action == "delete":
            return (await client.dns_delete_record(args.domain, args.id)).data
        if action == "delete-by-type":
            return (await client.dns_delete_record_by_name_type(args.domain, args.type, args.subdomain)).data

    if command == "ssl":
        return (await client.ssl_retrieve(args.domain)).data

    if command == "forward":
        if action == "list":
            return (await client.url_forwarding_list(args.domain)).data
        if action == "add":
            record = {
                "subdomain": args.subdomain,
                "location": args.location,
                "type": args.type,
                "includePath": "yes" if args.include_path else "no",
                "wildcard": "yes" if args.wildcard else "no",
            }
            return (await client.url_forwarding_create(args.domain, record)).data
        if action == "delete":
            return (await client.url_forwarding_delete(args.domain, args.id)).data

    if command == "dnssec":
        if action == "list":
            return (await client.get_dnssec_records(args.domain)).data
        if action == "add":
            record = {
                "keyTag": args.key_tag,
                "alg": args.alg,
                "digestType": args.digest_type,
                "digest": args.digest,
            }
            return (await client.create_dnssec_record(args.domain, record)).data
        if action == "delete":
            return (await client.delete_dnssec_record(args.domain, args.keytag)).data

    if command == "ns":
        if action == "get":
            return (await client.get_nameservers(args.domain)).data
        if action == "update":
            return (await client.update_nameservers(args.domain, args.nameservers)).data

    if command == "glue":
        if action == "list":
            return (await client.get_glue_records(args.domain)).data
        if action == "create":
            return (await client.create_glue_record(args.domain, args.host, _glue_ip(args.ip))).data
        if action == "update":
            return (await client.update_glue_record(args.domain, args.host, _glue_ip(args.ip))).data
        if action == "delete":
            return (await client.delete_glue_record(args.domain, args.host)).data

    raise ValueError(f"Unknown command: {command} {action or ''}".strip())


async def _run(config: SystemConfig, args: argparse.Namespace) -> Any:
    async with PorkbunClient(config) as client:
        return await run_operation(client, args)


def cmd_api(args: argparse.Namespace, config: Optional[SystemConfig] = None) -> int:
    """Run one API command and print its result."""
    try:
        config = config or load_config()
        data = asyncio.run(_run(config, args))
    except DomainValidationError as e:
        print(f"Domain Validation Error: {e.message}", file=sys.stderr)
        print("Please check your domain format and try again.", file=sys.stderr)
        return 1
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except RequestError as e:
        _print_json(e.data, stream=sys.stderr)
        return 1

    _print_json(data)
    return 0


def cmd_config(args: argparse.Namespace, config: Optional[SystemConfig] = None) -> int:
    """Handle the 'config' command."""
    if args.action == "init":
        path = create_default_user_config()
        if path is None:
            print(f"Configuration already exists at: {get_user_config_path()}")
            return 1
        print(f"Configuration created at: {path}")
        print("Edit it and add your API credentials.")
        return 0

    try:
        config = config or load_config()
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    print(f"User config: {get_user_config_path()}")
    print(f"  Base URL: {config.api.base_url}")
    print(f"  API key: {'set' if config.api.api_key else 'missing'}")
    print(f"  Secret key: {'set' if config.api.secret_key else 'missing'}")
    print(f"  State file: {config.persistence.state_file_path}")
    print(f"  Log level: {config.logging.level}")
    return 0


def _add_domain_action(subparsers, name: str, help_text: str) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, help=help_text)
    parser.add_argument("domain", type=_domain, help="Domain name (e.g., example.com)")
    return parser


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="swinelink",
        description="Command-line client for the Porkbun domain registrar API",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("ping", help="Test credentials and connectivity")
    _add_domain_action(subparsers, "check", "Check if a domain is available to register")
    subparsers.add_parser("list", help="List all domains in the account")

    pricing_parser = subparsers.add_parser("pricing", help="Show TLD pricing (cached for 20 minutes)")
    pricing_parser.add_argument(
        "tlds",
        nargs="*",
        help="Optional TLDs or domains to filter by (e.g., com .net example.co.uk)",
    )

    # 'dns' command
    dns_parser = subparsers.add_parser("dns", help="Manage DNS records")
    dns_actions = dns_parser.add_subparsers(dest="action", required=True)

    for action in ("create", "edit"):
        p = _add_domain_action(dns_actions, action, f"{action.capitalize()} a DNS record")
        if action == "edit":
            p.add_argument("id", help="Record ID")
        p.add_argument("--type", "-t", required=True, help="Record type (A, AAAA, CNAME, MX, TXT, ...)")
        p.add_argument("--content", "-c", required=True, help="Record content")
        p.add_argument("--name", "-n", default="", help="Subdomain (empty for root)")
        p.add_argument("--ttl", type=int, help="Time to live in seconds")
        p.add_argument("--prio", type=int, help="Priority (MX, SRV)")

    _add_domain_action(dns_actions, "list", "List all DNS records")
    for action, help_text in (("get", "Retrieve a record by ID"), ("delete", "Delete a record by ID")):
        p = _add_domain_action(dns_actions, action, help_text)
        p.add_argument("id", help="Record ID")

    for action, help_text in (
        ("get-by-type", "Retrieve records by type and subdomain"),
        ("delete-by-type", "Delete records by type and subdomain"),
        ("edit-by-type", "Edit records by type and subdomain"),
    ):
        p = _add_domain_action(dns_actions, action, help_text)
        p.add_argument("type", help="Record type")
        p.add_argument("subdomain", nargs="?", default="", help="Subdomain (empty for root)")
        if action == "edit-by-type":
            p.add_argument("--content", "-c", required=True, help="Record content")
            p.add_argument("--ttl", type=int, help="Time to live in seconds")
            p.add_argument("--prio", type=int, help="Priority (MX, SRV)")

    # 'ssl' command
    _add_domain_action(subparsers, "ssl", "Retrieve the SSL certificate bundle")

    # 'forward' command
    forward_parser = subparsers.add_parser("forward", help="Manage URL forwarding")
    forward_actions = forward_parser.add_subparsers(dest="action", required=True)
    _add_domain_action(forward_actions, "list", "List URL forwards")
    p = _add_domain_action(forward_actions, "add", "Add a URL forward")
    p.add_argument("location", help="Target URL")
    p.add_argument("--subdomain", "-s", default="", help="Subdomain (empty for root)")
    p.add_argument("--type", choices=["temporary", "permanent"], default="temporary")
    p.add_argument("--include-path", action="store_true", help="Append the request path")
    p.add_argument("--wildcard", action="store_true", help="Forward all subdomains")
    p = _add_domain_action(forward_actions, "delete", "Delete a URL forward")
    p.add_argument("id", help="Forward record ID")

    # 'dnssec' command
    dnssec_parser = subparsers.add_parser("dnssec", help="Manage DNSSEC DS records")
    dnssec_actions = dnssec_parser.add_subparsers(dest="action", required=True)
    _add_domain_action(dnssec_actions, "list", "List DNSSEC records")
    p = _add_domain_action(dnssec_actions, "add", "Create a DNSSEC record")
    p.add_argument("--key-tag", required=True)
    p.add_argument("--alg", required=True)
    p.add_argument("--digest-type", required=True)
    p.add_argument("--digest", required=True)
    p = _add_domain_action(dnssec_actions, "delete", "Delete a DNSSEC record")
    p.add_argument("keytag", help="Key tag of the record")

    # 'ns' command
    ns_parser = subparsers.add_parser("ns", help="Manage nameservers")
    ns_actions = ns_parser.add_subparsers(dest="action", required=True)
    _add_domain_action(ns_actions, "get", "Show nameservers")
    p = _add_domain_action(ns_actions, "update", "Replace nameservers")
    p.add_argument("nameservers", nargs="+", help="Nameserver hostnames")

    # 'glue' command
    glue_parser = subparsers.add_parser("glue", help="Manage glue records")
    glue_actions = glue_parser.add_subparsers(dest="action", required=True)
    _add_domain_action(glue_actions, "list", "List glue records")
    for action in ("create", "update"):
        p = _add_domain_action(glue_actions, action, f"{action.capitalize()} a glue record")
        p.add_argument("host", help="Host label (e.g., ns1)")
        p.add_argument("ip", nargs="+", help="IP address(es)")
    p = _add_domain_action(glue_actions, "delete", "Delete a glue record")
    p.add_argument("host", help="Host label (e.g., ns1)")

    # 'config' command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument("action", choices=["init", "show"], help="Configuration action")
    config_parser.set_defaults(func=cmd_config)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    func = getattr(args, "func", cmd_api)
    return func(args)


if __name__ == "__main__":
    sys.exit(main())

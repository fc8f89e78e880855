import json
from argparse import ArgumentParser, Namespace

from userlink.di import DiContainer
from userlink.domain.connection import Connection, ProviderId, ProviderUserId
from userlink.domain.repo.connection_directory import IConnectionDirectory
from userlink.domain.user import UserId
from userlink.infra.migrate import get_version, migrate
from userlink.logging import setup as setup_logging


def make_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="userlink",
        description="Inspect which local users are connected to which provider accounts",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Create or upgrade the database schema")

    find_user = subparsers.add_parser(
        "find-user", help="Find the user signing in with a provider account"
    )
    find_user.add_argument("provider_id", metavar="PROVIDER")
    find_user.add_argument("provider_user_id", metavar="PROVIDER_USER_ID")

    find_users = subparsers.add_parser(
        "find-users", help="Find all users connected to the given provider accounts"
    )
    find_users.add_argument("provider_id", metavar="PROVIDER")
    find_users.add_argument("provider_user_ids", metavar="PROVIDER_USER_ID", nargs="+")

    connections = subparsers.add_parser("connections", help="List the connections of a user")
    connections.add_argument("user_id", metavar="USER_ID")

    return parser


def run_command(args: Namespace, directory: IConnectionDirectory) -> int:
    match args.command:
        case "find-user":
            connection = Connection(
                provider_id=ProviderId(args.provider_id),
                provider_user_id=ProviderUserId(args.provider_user_id),
            )

            user_id = directory.find_user_id_with_connection(connection)

            if not user_id:
                print(f"No single user is connected to {connection.key}")  # noqa: T201
                return 1

            print(user_id)  # noqa: T201

        case "find-users":
            user_ids = directory.find_user_ids_connected_to(
                ProviderId(args.provider_id), set(args.provider_user_ids)
            )

            for user_id in sorted(user_ids):
                print(user_id)  # noqa: T201

        case "connections":
            repo = directory.create_connection_repository(UserId(args.user_id))

            # Never print credentials
            output = {
                provider_id: [
                    {
                        "provider_user_id": c.provider_user_id,
                        "display_name": c.display_name,
                        "profile_url": c.profile_url,
                    }
                    for c in connections
                ]
                for provider_id, connections in repo.find_all_connections().items()
            }

            print(json.dumps(output, indent=2))  # noqa: T201

    return 0


def main(argv: list[str] | None = None) -> int:
    setup_logging()

    args = make_parser().parse_args(argv)

    if args.command == "migrate":
        db = DiContainer.db()

        migrate(db)

        print(f"Database is at version {get_version(db)}")  # noqa: T201

        return 0

    return run_command(args, DiContainer.connection_directory())


if __name__ == "__main__":
    raise SystemExit(main())

from routeguard import GuardConfig, RouteGuard


def main() -> None:
    guard = RouteGuard(GuardConfig(lookin="params"))

    is_reader = guard.where(lambda role: role in ("reader", "admin"), "role")
    is_archived = guard.where(lambda archived: archived is True, "archived")

    # Readers may read, but nobody reads archived documents.
    mw = guard.require(guard.grant(is_reader), guard.revoke(is_archived))

    print(mw.authorize_sync({"params": {"role": "reader", "archived": False}}))  # True
    print(mw.authorize_sync({"params": {"role": "reader", "archived": True}}))  # False
    print(mw.authorize_sync({"params": {"role": "guest", "archived": False}}))  # False


if __name__ == "__main__":
    main()

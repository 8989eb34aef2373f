"""Entry point for `python -m admin_wallet`."""

from admin_wallet.cli import main


if __name__ == "__main__":
    main()

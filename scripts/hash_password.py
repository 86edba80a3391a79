import argparse
import getpass

from core.auth import hash_password


def main(argv=None):
    parser = argparse.ArgumentParser(description="Print the stored digest for a password.")
    parser.add_argument("password", nargs="?", help="password to hash (prompted when omitted)")
    args = parser.parse_args(argv)
    password = args.password or getpass.getpass("Password: ")
    print(hash_password(password))


if __name__ == "__main__":
    main()

"""Utility module to generate a JWT signing secret for the .env file"""
import argparse
import secrets


def generate_secret_key(num_bytes: int = 32) -> str:
    """Return a random hex secret built from num_bytes of entropy"""
    if num_bytes < 32:
        raise ValueError("Use at least 32 bytes of entropy for an HS256 secret")
    return secrets.token_hex(num_bytes)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Print a SECRET_KEY line for .env")
    parser.add_argument("--bytes", type=int, default=32, dest="num_bytes")
    args = parser.parse_args(argv)
    print(f"SECRET_KEY={generate_secret_key(args.num_bytes)}")


if __name__ == "__main__":
    main()

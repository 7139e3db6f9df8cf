import sys

from storefront.cli import main

if __name__ == "__main__":
    # Examples:
    #   python main.py --offline seed
    #   python main.py --offline cart add 1 --quantity 2
    #   python main.py --offline checkout --first-name Ada --last-name Lovelace --email ada@example.com \
    #       --address "1 Main St" --city Springfield --state IL --postal-code 62701 --card-number 4242424242424242
    sys.exit(main())

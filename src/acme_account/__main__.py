import sys

from acme_account import main

if __name__ == '__main__':
    sys.exit(main.main())

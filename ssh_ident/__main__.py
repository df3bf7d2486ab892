"""Allow `python -m ssh_ident`."""

from ssh_ident.main import main

main()

from repoclient.cli import main

main()

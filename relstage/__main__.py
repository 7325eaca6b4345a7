from relstage.cli.app import main

main()

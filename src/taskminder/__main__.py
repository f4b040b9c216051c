from taskminder.cli.main import main

main()

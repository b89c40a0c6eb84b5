from woolball_scaffold.cli import main

main()

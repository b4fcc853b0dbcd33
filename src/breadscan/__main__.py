from breadscan.cli import main

main()

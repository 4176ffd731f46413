from fednotes.main import main

main()

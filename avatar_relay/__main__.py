from avatar_relay.app import main

main()

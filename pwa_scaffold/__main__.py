from pwa_scaffold.pipeline import main

main()

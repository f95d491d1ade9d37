"""NEO Watch: near-Earth-object risk scoring, watchlists, alerts and chat."""

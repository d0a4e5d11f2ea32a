# API clients for Withings and Strava

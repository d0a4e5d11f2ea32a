# Services orchestrating client calls

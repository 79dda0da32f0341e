"""Media player identities, state, control, active-player selection and event streams."""
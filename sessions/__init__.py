# Care sessions
